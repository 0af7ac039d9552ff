"""Settings package for the rental booking core.

`base.py` contains configuration shared across environments; `dev.py`,
`prod.py` and `test.py` override it per environment.
"""
