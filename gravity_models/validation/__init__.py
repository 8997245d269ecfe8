"""
Validation Package
==================

Test suite for the gravity field models.

Modules:
--------
- test_icgem         : ICGEM file parsing and format errors
- test_coefficients  : Coefficient table and time-variable coefficients
- test_legendre      : Associated Legendre functions and derivatives
- test_acceleration  : Spherical to Cartesian acceleration transform
- test_gravity_field : Harmonic synthesis and accelerations (EGM96 reference values)
- test_download      : Model cache and downloader
- test_cli           : Command line, configuration, and end-to-end runs

Usage:
------
Run all tests:
  python -m pytest gravity_models/validation/ -v

Run a specific test module:
  python -m pytest gravity_models/validation/test_gravity_field.py -v

Run a specific test class:
  python -m pytest gravity_models/validation/test_legendre.py::TestDerivatives -v

The EGM96 reference tests need the model in the cache:
  python -m gravity_models.download.icgem EGM96
"""
