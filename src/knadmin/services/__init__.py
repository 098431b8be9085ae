"""Service layer: orchestrates domain logic against the cluster store.

Every public service method returns a
:class:`~knadmin.services.result.ServiceResult`.
"""
