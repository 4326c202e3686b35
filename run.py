"""
Opt-in Popups entry point.
"""
import os
import sys
import traceback

print("[Optin] ========================================")
print("[Optin] Starting Opt-in Popups v1.0.0")
print("[Optin] ========================================")

# Default to production for deployment
config_name = os.getenv('FLASK_ENV', 'production')
print(f"[Optin] Config: {config_name}")
print(f"[Optin] PORT: {os.getenv('PORT', 'not set')}")
print(f"[Optin] DATABASE_URL: {'set' if os.getenv('DATABASE_URL') else 'NOT SET'}")

try:
    from optin import create_app
    app = create_app(config_name)
    print(f"[Optin] App created, {len(list(app.url_map.iter_rules()))} routes")
except Exception as e:
    print(f"[Optin] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=config_name == 'development'
    )
