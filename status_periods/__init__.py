"""Time-in-status reporting for JIRA sprints"""
