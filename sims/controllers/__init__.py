"""
Request controllers for the mock SIMS.

Controllers take plain request data and return a ``(data, status, headers)``
tuple. They know nothing about Flask response objects; the routes in
:mod:`sims.routes` decide whether to render a template or JSON.
"""

from typing import Tuple

ResponseData = Tuple[dict, int, dict]
