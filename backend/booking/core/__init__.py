# Core package initialization
# Configuration, logging, errors and authentication helpers.
# Submodules are imported explicitly; the domain layer depends on
# core.exceptions, so this file must not pull in modules that import the domain.
