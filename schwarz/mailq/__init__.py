
from .mailq_parser import *
from .readers import *
