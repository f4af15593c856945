"""POSTA reference data: manual fee defaults."""
