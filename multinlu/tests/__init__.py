"""multinlu test suite"""
