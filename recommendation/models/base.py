# Recommendation tables live in the application's metadata so
# Base.metadata.create_all() in main.py creates them with everything else
from db import Base

__all__ = ["Base"]
