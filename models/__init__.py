# dirbrowse/models
# Purpose: Pydantic data types shared by the runtime and the web layer.
