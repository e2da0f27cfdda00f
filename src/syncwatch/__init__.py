"""syncwatch - tell Syncthing which directories changed, shortly after they change."""

__version__ = "0.1.0"
