from web3 import Web3
from dotenv import load_dotenv
from launcher import (
    AIService,
    Env,
    FlapPortal,
    ImageService,
    Launcher,
    PumpFun,
    XMonitor,
    load_config,
)


load_dotenv()


def main():
    env = Env.from_env()
    config = load_config()
    print(f"Target users: {', '.join(config.target_users)}")
    print(f"Initial buy - SOL: {config.initial_buy_solana}, BNB: {config.initial_buy_bsc}")

    # Connect to web3
    web3 = Web3(Web3.HTTPProvider(env.bsc_rpc_url))
    if not web3.is_connected():
        raise Exception("Issue to connect to Web3")

    images = ImageService(env.pinata_jwt)
    launcher = Launcher(
        config,
        XMonitor(env.x_bearer_token, config.target_users, config.mock),
        AIService(env.groq_api_key, config.temperature),
        images,
        FlapPortal(
            web3,
            env.bsc_private_key,
            images,
            vanity=config.vanity,
            max_gwei=env.max_gwei,
        ),
        PumpFun(env.solana_rpc_url, env.solana_private_key),
    )

    results = launcher.run_once()
    print(f"Done! {len(results)} launch(es)")


if __name__ == "__main__":
    main()
