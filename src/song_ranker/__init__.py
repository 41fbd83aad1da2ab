"""Song Ranker - pairwise song ranking engine."""

from loguru import logger

__version__ = "0.1.0"

# Library code stays quiet until an application enables it (see core.output)
logger.disable("song_ranker")
