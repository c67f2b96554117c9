from .vanity import (  # noqa: F401
    VanityResult,
    VanitySearchExhausted,
    create2_address,
    find_vanity_salt,
    find_vanity_salt_parallel,
    minimal_proxy_bytecode,
    predict_create2_address,
)
from .config import BotConfig, ConfigError, Env, VanitySettings, get_config, load_config  # noqa: F401
from .tweets import Tweet, XMonitor  # noqa: F401
from .ai import AIService, TokenMetadata  # noqa: F401
from .images import ImageService, TokenImage  # noqa: F401
from .flap import FlapLaunch, FlapPortal, NewTokenParams  # noqa: F401
from .pumpfun import PumpFun, PumpLaunch  # noqa: F401
from .pipeline import Launcher, LaunchResult  # noqa: F401
