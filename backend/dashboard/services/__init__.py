# Services package init
"""
Teacher Dashboard Backend — Services Layer
===========================================

What:  Business logic between routes (HTTP) and the persistence gateway.

Service Inventory:
    - IdentityProvider (abstract): credential check behind POST /auth/login
    - StaticCredentialProvider: the one fixed credential pair
    - TokenService: signs and verifies bearer tokens
    - StudentService: list / create / update / delete students
    - AnalyticsService: concurrent aggregate reads
"""
