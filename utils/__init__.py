"""
Utility modules for water treatment evaluation.

- sample_values: coercion of operator input and the definition of "present"
- sample_validation: physical-domain checks before submission
- action_defaults_db: default action table YAML loader
"""
