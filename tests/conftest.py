from proppath.testing import proppath_config

__all__ = ["proppath_config"]
