"""Legacy identity bridge.

Federates users and passwords held by a legacy authentication facade into a
local identity store, provisioning local records just in time on successful
login instead of through a bulk migration.
"""

__version__ = "0.1.0"
