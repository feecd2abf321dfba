"""Application directories."""

from pathlib import Path
from platformdirs import user_config_dir, user_log_dir


class GlobalPaths:
    """Per-user directories of the bridge."""

    def __init__(self, app_name: str = "yamlls-bridge"):
        self.app_name = app_name

        self.config = Path(user_config_dir(self.app_name))
        self.log = Path(user_log_dir(self.app_name))

        self.preferences = self.config / "preferences.json"


Paths = GlobalPaths()
