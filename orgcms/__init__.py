"""orgcms: multi-tenant content management core."""

__version__ = "1.0.0"
