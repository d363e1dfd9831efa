"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .auth import *
from .room import *
from .invoice import *
from .ai import *
from .admin import *
