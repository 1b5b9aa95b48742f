"""crudops: a disposable mock CRUD backend served from a JSON file.

Layout:
    templates/<name>.json   # seed documents, selected with TEMPLATE
    db.json                 # working database, copied from the template on first boot

Every top-level key of the database becomes a REST resource under /api.
Non-GET requests need ``Authorization: Bearer <API_KEY>``.
"""

from crudops.app_factory import create_app
from crudops.config import Config

__version__ = "1.0.0"

__all__ = ["Config", "__version__", "create_app"]
