"""Data access managers for the Plura API.

Each module provides async functions that encapsulate queries against the
relational store (and, for users, the listing cache).  Managers accept
``AsyncSession`` as a parameter and raise domain exceptions
(``LookupError``, ``ValueError``), never HTTP exceptions -- that
translation is the router's responsibility.
"""
