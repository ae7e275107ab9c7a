"""Employee Directory package.

Feature modules (employees, csv_io) sit on top of a thin Flask controller
layer and service/repository layers wired together in ``container``.
"""
