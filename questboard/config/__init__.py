from questboard.config.settings import settings

__all__ = ["settings"]
