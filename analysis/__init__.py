"""
Analysis package for the Block Dominance Map: styling, text and the folium map.
"""
