"""
sharded, parallel identification and annotation of structural variant breakpoints
"""
__version__ = '0.1.0'
