"""Device Sync package.

Keeps the user table's active/inactive status in line with the punch logs of
the entry and exit attendance devices. Organized by feature modules (users,
devices, sync) with a thin Flask controller layer over service/repository
layers.
"""
