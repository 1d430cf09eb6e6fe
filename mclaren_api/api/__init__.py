"""
Versioned API controllers.

Each subpackage is one API version, named ``v<major>_<minor>``; every module
inside it exposing ``router`` and ``RESOURCE`` is a controller of that version.
"""

CONTROLLERS_PACKAGE = __name__
