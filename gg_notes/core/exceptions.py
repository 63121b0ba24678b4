

class GgNotesError(Exception):
    """Base exception for all gg_notes errors"""
    pass

class ConfigError(GgNotesError):
    """Invalid or inconsistent global.json / dataset config"""
    pass

class DatasetConfigError(ConfigError):
    """A single dataset entry cannot be materialised (bad path, unknown builtin, ...)"""
    pass

class DatasetSchemaError(GgNotesError):
    """
    Table doesn't match what a plot or helper expects
    duplicate column names, mapped columns missing from the data, etc
    """
    pass

class LayerError(GgNotesError):
    """Unknown geom/stat/position or an invalid parameter combination"""
    pass

class ModelConfigError(GgNotesError):
    """Model configuration invalid (unknown method, formula columns missing, ...)"""
    pass
