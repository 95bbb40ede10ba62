"""Pipeline stages: link detection, linkage index, bundling, protection.

Each stage exposes a small, pure function API; tunables live under
`processing.linkage` in the runtime configuration.
"""
