from .boundaries import BOUNDARY_COLUMNS, borders, map_data, region_centres

__all__ = ["BOUNDARY_COLUMNS", "borders", "map_data", "region_centres"]
