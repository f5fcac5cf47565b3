"""
Service layer package.

Each service module owns one part of the recruitment workflow.  Services
are the only layer that touches models; routes build an ``Actor`` from
the session and call into a service, which raises a ``RecruitFlowError``
subclass on failure.

Import services in route modules as needed::

    from recruitflow.services import requisition_service
"""
