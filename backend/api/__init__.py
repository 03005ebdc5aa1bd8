# API routers: vehicles, jobs, demo control; dependencies read services from app.state
