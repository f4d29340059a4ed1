from logic.equilibrium import *
from logic.merchantslots import *
from logic.skill import *
from logic.candidates import *
from logic.cargoselection import *
from logic.availability import *
from logic.cargosize import *
from logic.quality import *
from logic.pricing import *
from logic.haggle import *
from logic.merchant import *
from logic.buying import *
from logic.selling import *
from logic.serialization import *
