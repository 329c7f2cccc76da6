"""
Behavioral learning domain: similarity, performance, profiles and attribution
"""
