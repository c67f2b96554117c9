import os
from datetime import datetime


def log(message, addTimestamp=True):
    print(message)
    log_file = os.environ.get("LOG_FILE", "")
    if log_file != "":
        with open(log_file, "a") as file:
            if addTimestamp:
                file.write(datetime.now().strftime("%Y-%m-%d %H:%M:%S - "))
            file.write(f"{message}\n")
