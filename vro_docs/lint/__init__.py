"""
Checks for workflow exports.

Modules:
- naming: Naming conventions for inputs, outputs and variables, and
  mandatory element descriptions
- scripts: ESLint over the JavaScript embedded in scriptable tasks
"""
