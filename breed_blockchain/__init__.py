"""
NFTBreed deployment toolkit
===========================

Compile, deploy and verify the NFTBreed contracts on BNB Smart Chain.
"""

__version__ = "1.0.0"
