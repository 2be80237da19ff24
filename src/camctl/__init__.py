"""
camctl: libcamera control schema compiler and runtime value codec.

Subpackages
- camctl.core: schema models, type mapping, identifier transforms, version resolution.
- camctl.io: configuration, schema sources, filesystem helpers.
- camctl.gen: Python module, C header, and snapshot emitters.
- camctl.runtime: ControlValue, native cells, typed entries, dynamic registry.

Top-level modules
- camctl.build: selects and loads the snapshot matching the linked runtime.
- camctl.cli: ``camctl`` command line.
"""

__version__ = "0.1.0"
