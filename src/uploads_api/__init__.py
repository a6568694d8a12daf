"""
Uploads API.

Authenticated upload and delete plus public download of files kept on a
local filesystem volume.
"""
