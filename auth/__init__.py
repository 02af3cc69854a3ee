"""
auth — User authentication module.

Provides:
  • Identity store (users, roles, bcrypt password checks)
  • Session JWT creation & verification
  • Google ID token verification
  • Register / Login / Google register / Google login API routes
"""
