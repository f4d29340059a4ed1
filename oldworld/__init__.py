from oldworld.exceptions import *
from oldworld.season import *
from oldworld.settlement import *
from oldworld.currency import *
from oldworld.cargotypes import *
from oldworld.cargotables import *
