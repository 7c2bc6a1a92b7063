"""qtcli: scaffold Qt projects and files from question-driven templates.

A template directory holds a ``templates.yml`` listing the files it
produces and an optional ``prompt.yml`` listing the questions whose
answers parametrize those files.  Answers can be saved as named presets
and reused.
"""

__version__ = "0.1.0"
