"""
The MODEL layer contains pure data structures and the drawing I/O.
It has NO knowledge of the adjustment algorithms beyond the entry points
exposed on ProjectState.
"""
