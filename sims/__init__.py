"""
Mock Student Information Management System (SIMS)

The mock SIMS is a Flask application that stands in for a university student
information system during Learning Management System (LMS) integration
testing. It exposes student, faculty and admin profile data through a small
REST API, and fronts that API with an OAuth2 authorization server.

An LMS registered as an OAuth2 client sends the user to
``/oauth/authorize``, where the user logs in with their e-mail address (or,
for students, their registration number) and password. On success the user
agent is redirected back to the LMS with a single-use authorization code,
which the LMS backend exchanges at ``/oauth/token`` for an opaque bearer
token and a refresh token. Every request to ``/api/...`` must carry that
bearer token; see :mod:`sims.auth`.

Users, clients, authorization codes and access tokens are stored in a
relational database; see :mod:`sims.services.datastore`.
"""
