# The registry of built-in level factories
LEVEL_REGISTRY = {}

# The registry of built-in model (scene graph) factories
MODEL_REGISTRY = {}

# The registry of symmetry discount functions
SYMMETRY_REGISTRY = {}

def register_level(level_id: str):
    def deco(func):
        LEVEL_REGISTRY[level_id] = func
        return func
    return deco

def register_model(model_ref: str):
    def deco(func):
        MODEL_REGISTRY[model_ref] = func
        return func
    return deco

def register_symmetry(kind):
    def deco(func):
        SYMMETRY_REGISTRY[kind] = func
        return func
    return deco
