"""Public course catalog."""

from coursemart.courses.service import CatalogOptions, CourseCatalog


__all__ = ["CatalogOptions", "CourseCatalog"]
