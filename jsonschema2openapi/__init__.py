import importlib

mod = "jsonschema2openapi"
class LazyLoader:
    """
    Lazy loader for the jsonschema2openapi functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the functions and their corresponding module paths
_mappings = {
    "put_schema_into_openapi": (f"{mod}.jsonstoopenapi", "put_schema_into_openapi"),
    "translate_definitions": (f"{mod}.jsonstoopenapi", "translate_definitions"),
    "convert_jsons_to_openapi": (f"{mod}.jsonstoopenapi", "convert_jsons_to_openapi"),
    "TranslationError": (f"{mod}.common", "TranslationError"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
