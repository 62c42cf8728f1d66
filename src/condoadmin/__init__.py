from condoadmin.version import APP_VERSION

__version__ = APP_VERSION
