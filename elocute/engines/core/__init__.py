from . import dtw
from . import clustering

__all__ = ['dtw', 'clustering']
