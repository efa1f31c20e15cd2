
from .mailq_parse import *
