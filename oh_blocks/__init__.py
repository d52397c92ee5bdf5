# Package initializer for the opening hours blocks service.

"""
The `oh_blocks` package renders weekly opening hours tables for entities.

Modules:

- ``config``: application settings loaded from environment variables.
- ``models``: Pydantic data models for entities, occurrences, cacheability and tables.
- ``dates``: week window, weekday numbering and time formatting helpers.
- ``i18n``: the translator used for fixed UI strings.
- ``provider``: the opening hours provider protocol and a JSON file backed provider.
- ``block``: the weekly hours block and its table builder.
- ``render``: HTML rendering of table view models.
- ``main``: the FastAPI application definition.

"""
