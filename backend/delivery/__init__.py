"""
Scheduled video delivery engine.

The DeliveryScheduler (scheduler.py) polls the store every minute, the
selector picks pending deliveries that are due, and the DeliveryExecutor
(executor.py) sends each one and records whether it was sent or failed.
ScheduleService (service.py) creates, lists and deletes deliveries.

Submodules are imported directly; the email and database layers depend
on errors.py and models.py, so this package does not re-export.
"""
