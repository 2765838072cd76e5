# hub/routers/__init__.py

# Lets "from hub.routers import sales" work
from . import auth
from . import users
from . import products
from . import brands
from . import suppliers
from . import firms
from . import sales
from . import b2b_sales
from . import notes
from . import settings
