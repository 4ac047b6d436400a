from importlib import import_module

modules = [
    'auth',
    'users',
    'vocabularies',
    'catalog',
    'entries',
    'contributions',
    'identity',
    'contact',
]

for m in modules:
    import_module(f'.{m}', __name__)

__all__ = modules
