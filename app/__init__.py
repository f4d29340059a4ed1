from app.appdetails import *
from app.logger import *
from app.config import *
