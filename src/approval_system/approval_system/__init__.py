"""Approval System package.

This package is organized by feature modules (documents, approvals, remote, ...)
with SOLID service/repository layers and no web layer of its own.
"""
