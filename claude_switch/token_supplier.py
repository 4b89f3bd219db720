import logging
import os
from typing import List, Optional

import click

from .config import DEFAULT_TOKEN_ENV_VARS, ConfigStore
from .errors import ClaudeSwitchError, EmptyTokenError
from .utils import info_message, safe_echo, success_message, warning_message

logger = logging.getLogger(__name__)


class TokenSupplier:
    """Find a Z.AI API token: environment, then the saved file, then the user."""

    def __init__(self, store: ConfigStore, env_vars: Optional[List[str]] = None,
                 interactive: bool = True):
        self.store = store
        self.env_vars = env_vars if env_vars is not None else list(DEFAULT_TOKEN_ENV_VARS)
        self.interactive = interactive

    def __call__(self) -> str:
        return self.get_token()

    def get_token(self) -> str:
        for var in self.env_vars:
            token = os.environ.get(var, "").strip()
            if token:
                safe_echo(info_message(f"Using token from {var} environment variable"))
                return token

        saved = self.store.load_token()
        if saved:
            safe_echo(info_message("Using token from saved token file"))
            return saved

        if not self.interactive:
            raise EmptyTokenError(
                f"No API token found. Set {self.env_vars[0] if self.env_vars else 'a token variable'} "
                "or run interactively"
            )

        return self._prompt_for_token()

    def _prompt_for_token(self) -> str:
        safe_echo(warning_message("No API token found"))
        token = click.prompt(
            "Please enter your Z.AI API token",
            default="",
            show_default=False,
            hide_input=True,
        ).strip()

        if not token:
            raise EmptyTokenError()

        if click.confirm("Save token for future use?", default=False):
            try:
                self.store.save_token(token)
                safe_echo(success_message("Token saved successfully"))
            except ClaudeSwitchError as e:
                logger.warning("Failed to save token: %s", e)

        return token
