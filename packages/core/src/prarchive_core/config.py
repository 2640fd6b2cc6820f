import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG: dict = {
    "output_dir": ".",
    "store": "directory",  # "directory" | "zip"
    "assets_dirname": "assets",
    "document_name": "pull-request.md",
    "per_page": 100,
    "retry_failed_assets": True,  # False = remember failed asset URLs for the rest of the run
    "asset_timeout": None,  # seconds; None waits indefinitely
    "user_agent": "prarchive",
}


def load_config(config_path: str = ".prarchive.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prarchive.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # A .env file in the working directory may carry the token; real
    # environment variables win over it.
    load_dotenv(Path.cwd() / ".env", override=False)
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
