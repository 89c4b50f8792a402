"""saber-vue-app -- creates Saber Vue applications.

Quick usage::

    import asyncio
    from saber_vue.creator import ProjectCreator

    result = asyncio.run(ProjectCreator().create("my-vue-app"))
"""

__version__ = "0.1.0"
