from app.models.client import Client, ClientContact  # noqa: F401
from app.models.company import Company  # noqa: F401
from app.models.user import User  # noqa: F401
