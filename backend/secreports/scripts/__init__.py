# backend/secreports/scripts/__init__.py
