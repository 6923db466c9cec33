"""
orgdesk: organization-scoped people, team, license and asset records with a
TTL cache in front of the remote data source.
"""
