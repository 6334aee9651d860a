"""Django settings for vault project.

Settings are split into components; environment values are read with
python-decouple (see ``vault.settings.components``).
"""

from vault.settings.components.common import *  # noqa: F403
from vault.settings.components.logging import *  # noqa: F403
from vault.settings.components.storages import *  # noqa: F403
