from common.utils import *
from common.validation import *
from common.random import *
from common.calculator import *
from common.dice import *
