"""Print the logging configuration the helpdesk API would start with."""

import json
import pathlib
import sys

from dotenv import load_dotenv

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from helpdesk.app_logging import LogSettings


def get_log_config():
    return LogSettings.from_env().describe()


def main():
    load_dotenv()
    sys.stdout.write(json.dumps(get_log_config(), indent=2) + "\n")


if __name__ == "__main__":
    main()
