#!/usr/bin/env python
"""
Print the app's routes to check that the backend imports cleanly.
"""
import sys
sys.path.insert(0, '.')

from app import app

print('=== Backend Structure Validation ===')
print(f'App Title: {app.title}')
print(f'App Version: {app.version}')

routes = [route for route in app.routes if hasattr(route, 'methods')]
print(f'API Routes: {len(routes)}')
for route in routes:
    print(f'  {",".join(sorted(route.methods or []))} {route.path}')

print()
print('OK: Backend imports successfully')
